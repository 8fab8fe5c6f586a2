from mailpull.cli.main import main

raise SystemExit(main())
