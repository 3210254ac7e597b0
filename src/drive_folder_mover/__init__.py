"""
Drive Folder Mover - relocate a folder subtree inside Google Drive.

This package provides functionality to:
- Move a folder with a single reparent call outside shared drives
- Discover the whole subtree of a folder inside shared drives
- Recreate the folder skeleton under the destination folder
- Reattach every file to its recreated folder in one batch
- Delete the emptied original folders
- Read move lists from Excel and write CSV reports of the results
"""

__version__ = "0.1.0"
