from create_vite import main

main()
