from oxisql.cli import main

main()
