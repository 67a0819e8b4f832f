from crossbuild.runner import main

main()
