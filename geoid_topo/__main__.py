from .cli.pipeline import main

main()
