# feedsim: synthetic trades -> positions -> market -> P&L feed.
# Kept import-free so feedsim.main can load .env before config is read.
__version__ = "0.1.0"
