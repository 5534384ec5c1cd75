"""HTTP tools API over the NocoDB operations."""
