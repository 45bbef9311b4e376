from ess.main import main

if __name__ == "__main__":
    # Same entry point as the `ess` console script
    main()
