"""Services used by the gh-wt commands."""
