"""emailbot: sales-lead email triage, reply drafting and approval workflow."""

__version__ = "0.1.0"
