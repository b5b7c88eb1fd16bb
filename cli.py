import pathlib
import sys
sys.path.append(str(pathlib.Path(__file__).parent / "src"))

if __name__ == "__main__":
    from treestore.boot import init_treestore
    from treestore.cli import main

    init_treestore("cli")

    main()
