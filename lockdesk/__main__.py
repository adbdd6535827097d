from lockdesk.main import main

main()
