from slack_mcp.cli import main

raise SystemExit(main())
