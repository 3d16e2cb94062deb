from deadlinks.cli import main

raise SystemExit(main())
