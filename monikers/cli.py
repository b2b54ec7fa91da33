"""
Monikers CLI - Command-line interface for the engine.

Usage:
    monikers serve [--host H] [--port P]        Run the API server
    monikers pool                               List cards for the next game
    monikers reviewed                           List retired cards
    monikers reset-reviews                      Put retired cards back in the pool
    monikers settings [--cards-per-game N] [--family | --base]
    monikers add-card <text> [--family]         Add a custom card
"""

import argparse
import logging
import sys

from .config import EnvironmentSettings


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Monikers - party game session engine",
        prog="monikers",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    subparsers.add_parser("pool", help="List cards for the next game")
    subparsers.add_parser("reviewed", help="List retired cards")
    subparsers.add_parser("reset-reviews", help="Put retired cards back in the pool")

    # Settings command
    settings_parser = subparsers.add_parser("settings", help="Show or change preferences")
    settings_parser.add_argument("--cards-per-game", type=int, choices=[5, 10, 15, 20, 25, 30])
    deck = settings_parser.add_mutually_exclusive_group()
    deck.add_argument("--family", dest="use_family_cards", action="store_true", default=None)
    deck.add_argument("--base", dest="use_family_cards", action="store_false")
    settings_parser.set_defaults(use_family_cards=None)

    # Custom card command
    add_parser = subparsers.add_parser("add-card", help="Add a custom card")
    add_parser.add_argument("text", help="Card text")
    add_parser.add_argument("--family", action="store_true", help="Family deck card")

    args = parser.parse_args(argv)

    settings = EnvironmentSettings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args, settings)
    elif args.command == "pool":
        cmd_pool(args, settings)
    elif args.command == "reviewed":
        cmd_reviewed(args, settings)
    elif args.command == "reset-reviews":
        cmd_reset_reviews(args, settings)
    elif args.command == "settings":
        cmd_settings(args, settings)
    elif args.command == "add-card":
        cmd_add_card(args, settings)
    else:
        parser.print_help()
        sys.exit(1)


def _service(settings):
    from .api.service import APIService
    return APIService(settings=settings)


def cmd_serve(args, settings):
    """Run the API server."""
    import uvicorn
    from .api.app import create_app

    app = create_app(_service(settings))
    uvicorn.run(app, host=args.host, port=args.port)


def cmd_pool(args, settings):
    """List cards for the next game."""
    pool = _service(settings).get_pool()
    deck = "family" if pool.use_family_cards else "base"
    print(f"{pool.count} card(s) in the {deck} deck:")
    for card in pool.cards:
        print(f"  {card.text}")


def cmd_reviewed(args, settings):
    """List retired cards."""
    reviewed = _service(settings).get_reviewed()
    if not reviewed.good and not reviewed.bad:
        print("No reviewed cards yet.")
        return
    if reviewed.good:
        print("Good cards:")
        for card in reviewed.good:
            print(f"  + {card.text}")
    if reviewed.bad:
        print("Bad cards:")
        for card in reviewed.bad:
            print(f"  - {card.text}")


def cmd_reset_reviews(args, settings):
    """Put retired cards back in the pool."""
    service = _service(settings)
    service.reset_reviews()
    print(f"Reviews cleared. {service.pool.size} card(s) in the pool.")


def cmd_settings(args, settings):
    """Show or change preferences."""
    from .api.schemas import SettingsRequest

    service = _service(settings)
    current = service.update_settings(SettingsRequest(
        cards_per_game=args.cards_per_game,
        use_family_cards=args.use_family_cards,
    ))
    print(f"Cards per game: {current.cards_per_game}")
    print(f"Deck: {'family' if current.use_family_cards else 'base'}")
    print(f"Turn duration: {current.turn_duration}s")


def cmd_add_card(args, settings):
    """Add a custom card."""
    service = _service(settings)
    try:
        card = service.add_custom_card(args.text, is_family=args.family)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Added card: {card.text} ({card.classification.value})")
    if not settings.custom_cards_enabled:
        print("Note: custom cards join the pool only when MONIKERS_CUSTOM_CARDS is set.")


if __name__ == "__main__":
    main()
