from jarswap import main

main()
