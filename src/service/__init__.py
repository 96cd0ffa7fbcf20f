"""HTTP front end of the ledger application: embedded server and gateway runner."""
