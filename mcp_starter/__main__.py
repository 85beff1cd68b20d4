from mcp_starter.server import main

main()
