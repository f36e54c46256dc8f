"""
Harvester App - Cursor-Paginated Dataset Harvest

Responsibilities:
- Walk every page of a cursor-paginated API resource, one request at a time
- Infer continuation from has_more, page fullness and cursor presence
- Pace requests with a delay between pages
- Save everything fetched to .xlsx, including an emergency save on failure

Output:
- hasil_rup_[YEAR]_full_[YYYY-MM-DDTHH-MM-SS-mmm].xlsx
- emergency_rup_[YEAR]_[EPOCH_MS].xlsx (partial data after a failed run)
"""
