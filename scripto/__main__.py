from scripto.cli.main import main

raise SystemExit(main())
