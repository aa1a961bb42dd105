"""Gangwayのコマンドラインエントリポイント。"""

if __name__ == "__main__":
    from gangway.cli import main

    main()
