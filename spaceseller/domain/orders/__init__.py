"""Order wizard: drafts, pricing, validation, autosave and submission"""
