"""Billing ledger and document engine for GST invoices, dyeing bills and payments."""
