from .converter import main

main()
