from journal_ai.cli import run


if __name__ == "__main__":
    run()
