from npmpull.main import main

main()
