# Services package init
"""
SheetRelay Backend — Services Layer
=====================================

Service Inventory:
    - GoogleWorkspaceClient: Sheets/Drive API wrapper (credentials, errors)
    - RecordService: Row fetch/append/edit/delete/save-image-link
    - ImageStorage (abstract): Interface for image hosting backends
    - DriveImageStorage: Upload validation + Google Drive storage
    - links: Drive view link → direct image URL conversion
"""
