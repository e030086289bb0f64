from vistadeploy import main

main()
