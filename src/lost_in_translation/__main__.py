from .cli.find_missing import main

raise SystemExit(main())
