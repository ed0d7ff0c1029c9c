"""
CRM Solar - lead pipeline front-end backed by a Google Sheets gateway.
"""
