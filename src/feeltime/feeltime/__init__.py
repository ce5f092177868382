"""feeltime package.

Clock in / clock out events tagged with an emotion score, stored behind one
storage contract (SQLite, MySQL or Google Cloud Storage) and served as
summaries, recent events and weekday/weekly trends.
"""
