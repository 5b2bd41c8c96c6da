"""
db/ - Database Layer
====================
PostgreSQL connection pooling and schema creation for the obligations and
payments tables. Nothing here imports from the service layer.
"""
