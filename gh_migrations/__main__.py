"""
Main execution module for the migration tool
"""

from gh_migrations.cli import main

if __name__ == "__main__":
    main()
