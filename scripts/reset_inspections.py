#!/usr/bin/env python3
"""
Clear all inspections and their working photo files for retesting.
Completed backups under BACKUP_DIR and the settings row are kept.
Run from the project directory: python3 scripts/reset_inspections.py
"""
import os

from roadworthy import create_app
from roadworthy.services.db import execute_db, query_db


def reset_inspections(app):
    """Delete every inspection row and working photo. Returns (rows, files)."""
    removed_files = 0
    with app.app_context():
        upload_dir = app.config['UPLOAD_DIR']
        for name in os.listdir(upload_dir):
            path = os.path.join(upload_dir, name)
            if os.path.isfile(path):
                os.remove(path)
                removed_files += 1
        rows = execute_db("DELETE FROM inspections")
    return rows, removed_files


def main():
    app = create_app()

    with app.app_context():
        count = query_db("SELECT COUNT(*) AS n FROM inspections", one=True)['n']
    print(f"Before: {count} inspections")

    rows, files = reset_inspections(app)

    print(f"CLEARED: {rows} inspections, {files} photo files removed")
    print(f"Backups kept in {app.config['BACKUP_DIR']}")


if __name__ == '__main__':
    main()
