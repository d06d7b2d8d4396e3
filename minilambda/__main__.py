from minilambda.main import main

main()
