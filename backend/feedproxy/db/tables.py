"""
Tables that exist after migrations. Use these names when writing raw SQL.
"""
ALL_TABLE_NAMES = (
    "feeds",
    "posts",
)
