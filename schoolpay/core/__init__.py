"""Cross-cutting infrastructure shared by the fee modules."""
