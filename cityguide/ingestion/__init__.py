"""
Ingestion Layer for the city guide.

This package fetches each content kind's sheet tab, parses it into typed
records and keeps the held record sets current.

Key Components:
- SheetAdapter: Fetches one sheet tab's raw response
- parse: Generic, schema-driven parser for every content kind
- ContentStore / HeldRecordSet: Current records per kind
- RefreshOrchestrator: Single-flight, interval-driven refreshes
"""
