# Models package init
"""
SheetRelay Backend — Sheet Models
==================================

What:  Structural descriptions of the spreadsheet the service proxies.
Why:   There is no local database; the only "model" is the column layout of
       the sheet itself.
"""
