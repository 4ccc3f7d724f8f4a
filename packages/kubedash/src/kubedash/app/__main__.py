from kubedash.app.cli import main

main()
