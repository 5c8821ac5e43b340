from hamlet6to7.main import main

raise SystemExit(main())
