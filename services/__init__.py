"""
Service layer

Pure helpers with no state transitions:
- NamingService: room codes, join input normalisation
- GameService: game validation, filters, picks by player
- ExportService: CSV dumps
"""
