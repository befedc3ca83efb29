from household_seed.cli import main

main()
