from preview_env.main import main

raise SystemExit(main())
