from scanboard.main import main

main()
