"""
Entry point for `python -m interview_qa`.
"""

from interview_qa.cli.main import main

if __name__ == "__main__":
    main()
