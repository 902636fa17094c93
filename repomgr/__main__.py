from repomgr.cli import main

main()
