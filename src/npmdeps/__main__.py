from npmdeps.cli import main

raise SystemExit(main())
