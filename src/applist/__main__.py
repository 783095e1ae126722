from applist.cli import main

raise SystemExit(main())
