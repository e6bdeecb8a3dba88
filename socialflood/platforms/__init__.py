"""Platform identifiers and static descriptors."""
