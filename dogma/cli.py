"""
Dogma CLI - Command-line interface for the engine.

Usage:
    dogma cards [--age N]                         List card data
    dogma validate                                Validate card data and effect registry
    dogma demo <card> [--players N] [--seed S]    Run one dogma with automatic answers
    dogma inspect <snapshot_file>                 Show boards, icons and the pending choice
    dogma resume <snapshot_file> <answer_file>    Answer the pending choice
"""

import argparse
import json
import sys
import time

from .config import configure_logging


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Dogma - Innovation effect engine",
        prog="dogma",
    )
    parser.add_argument("--log-level", help="Log level (default from DOGMA_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    cards_parser = subparsers.add_parser("cards", help="List card data")
    cards_parser.add_argument("--age", type=int, help="Only cards of this age")

    subparsers.add_parser("validate", help="Validate card data and effect registry")

    demo_parser = subparsers.add_parser("demo", help="Run one dogma with automatic answers")
    demo_parser.add_argument("card", help="Card title, e.g. 'Oars'")
    demo_parser.add_argument("--players", type=int, default=2, help="Number of players")
    demo_parser.add_argument("--seed", type=int, help="Shuffle seed for the supply")
    demo_parser.add_argument("--output", "-o", help="Write the final snapshot here")

    inspect_parser = subparsers.add_parser("inspect", help="Show a saved snapshot")
    inspect_parser.add_argument("snapshot_file", help="Path to snapshot JSON")

    resume_parser = subparsers.add_parser("resume", help="Answer the pending choice")
    resume_parser.add_argument("snapshot_file", help="Path to snapshot JSON")
    resume_parser.add_argument("answer_file", help="Path to answer JSON")
    resume_parser.add_argument("--output", "-o", help="Output snapshot file (default: overwrite)")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "cards":
        return cmd_cards(args)
    elif args.command == "validate":
        return cmd_validate(args)
    elif args.command == "demo":
        return cmd_demo(args)
    elif args.command == "inspect":
        return cmd_inspect(args)
    elif args.command == "resume":
        return cmd_resume(args)
    else:
        parser.print_help()
        sys.exit(1)


def _read(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)


def _write(path, text):
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def _malformed(error):
    """Report a pydantic ValidationError and exit."""
    print(f"Error: Malformed input: {error.error_count()} validation error(s)")
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        print(f"  - {location}: {detail['msg']}")
    sys.exit(1)


def cmd_cards(args):
    """List card data."""
    from .engine_core.cards import get_card_database

    for card in get_card_database():
        if args.age is not None and card.age != args.age:
            continue
        icons = " ".join(icon.value for icon in card.icons)
        print(f"{card.card_id:>3}  age {card.age:<2} {card.color.value:<7} {card.title:<20} [{icons}]")
    return 0


def cmd_validate(args):
    """Validate card data and the effect registry."""
    from .engine_core.cards import get_card_database
    from .engine_core.errors import RegistryError
    from .games.innovation import create_innovation_registry

    db = get_card_database()
    print(f"Cards: {len(db)} across ages {db.ages}")
    try:
        registry = create_innovation_registry(db)
    except RegistryError as e:
        print("\nErrors:")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)
    print(f"Effects: {len(registry)} for ages {list(registry.ages)}")
    print("OK")
    return 0


def cmd_demo(args):
    """Run one dogma on a fresh snapshot, answering choices automatically."""
    from .bots import FirstLegalPolicy, play_out
    from .engine_core.cards import get_card_database
    from .engine_core.effect_resolver import EffectResolver
    from .engine_core.errors import DogmaError, UnknownCardError
    from .engine_core.serialize import dump_event, dumps
    from .games.innovation import arrange, create_snapshot, default_registry

    db = get_card_database()
    try:
        card = db.by_title(args.card)
    except UnknownCardError:
        print(f"Error: Unknown card: {args.card}")
        sys.exit(1)
    registry = default_registry()
    if card.card_id not in registry:
        print(f"Error: No effect for {card.title} (age {card.age}); covered ages: {list(registry.ages)}")
        sys.exit(1)

    try:
        snapshot = create_snapshot(num_players=args.players, game_id="demo", random_seed=args.seed)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    snapshot = arrange(snapshot.at(time.time()), 0, board=[card.card_id])
    for player in range(args.players):
        pile = snapshot.pile(1)
        snapshot = arrange(snapshot, player, hand=pile.cards[-2:])

    resolver = EffectResolver(registry)
    try:
        outcome = play_out(resolver, snapshot, card.card_id, 0, FirstLegalPolicy())
    except DogmaError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"{card.title}: {len(outcome.events)} event(s)")
    for event in outcome.events:
        who = "" if event.player is None else f" player {event.player}"
        what = "" if event.card_id is None else f" {db.get(event.card_id).title}"
        data = json.dumps(dump_event(event)["data"])
        print(f"  #{event.id} {event.type.value}{who}{what} {data}")
    if outcome.game_over:
        print(f"Game over, winners: {list(outcome.snapshot.winners)}")
    if args.output:
        _write(args.output, dumps(outcome.snapshot, indent=2))
        print(f"Snapshot written to {args.output}")
    return 0


def cmd_inspect(args):
    """Show boards, icon counts and the pending choice of a saved snapshot."""
    from pydantic import ValidationError

    from .engine_core.icons import icon_counts
    from .engine_core.serialize import dump_choice, loads
    from .engine_core.validation import validate_snapshot

    try:
        snapshot = loads(_read(args.snapshot_file))
    except ValidationError as e:
        _malformed(e)
    print(f"Game: {snapshot.game_id} ({snapshot.phase.value}), {len(snapshot.events)} event(s)")
    for player, board in enumerate(snapshot.players):
        counts = icon_counts(snapshot, player)
        shown = ", ".join(f"{icon.value}={n}" for icon, n in sorted(counts.items(), key=lambda i: i[0].value))
        print(f"Player {player}: hand {list(board.hand)}, score {list(board.score)}")
        for stack in board.stacks:
            print(f"    {stack.color.value:<7} {list(stack.cards)} splay={stack.splay.value}")
        print(f"    icons: {shown or 'none'}")
    if snapshot.pending_choice is not None:
        print("\nPending choice:")
        print(json.dumps(dump_choice(snapshot.pending_choice), indent=2))

    result = validate_snapshot(snapshot, complete_deck=False)
    for warning in result.warnings:
        print(f"Warning: {warning}")
    if not result.valid:
        print("\nErrors:")
        for error in result.errors:
            print(f"  - {error}")
        sys.exit(1)
    return 0


def cmd_resume(args):
    """Answer the pending choice of a saved snapshot."""
    from pydantic import ValidationError

    from .engine_core.effect_resolver import EffectResolver
    from .engine_core.errors import DogmaError
    from .engine_core.serialize import dumps, load_answer, loads
    from .games.innovation import default_registry

    try:
        snapshot = loads(_read(args.snapshot_file))
        answer = load_answer(_read(args.answer_file))
    except ValidationError as e:
        _malformed(e)
    resolver = EffectResolver(default_registry())
    try:
        # New events and deadlines are stamped with wall-clock time
        snapshot = snapshot.at(max(snapshot.clock, time.time()))
        outcome = resolver.resume(snapshot, answer)
    except DogmaError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"State: {outcome.state.value}, {len(outcome.events)} new event(s)")
    if outcome.pending_choice is not None:
        print(f"Next choice: {outcome.pending_choice.choice_id} for player {outcome.pending_choice.player}")
    output = args.output or args.snapshot_file
    _write(output, dumps(outcome.snapshot, indent=2))
    print(f"Snapshot written to {output}")
    return 0


if __name__ == "__main__":
    main()
