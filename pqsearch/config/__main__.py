from pqsearch.config import main

raise SystemExit(main())
