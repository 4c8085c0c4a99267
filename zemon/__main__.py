from zemon.app import main

main()
