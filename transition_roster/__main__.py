from transition_roster.cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
