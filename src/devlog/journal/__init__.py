"""Development log: entry template, parser, and append-only document.

Layout:
    <project>/
    ├── DEVELOPMENT_LOG.md                  # Title, intro, then one section per task
    ├── .cursor/rules/development-log.mdc   # Rule file read by the assistant host
    └── .devlog/
        ├── processed                       # Hook payload hashes already appended
        └── versions/                       # Backups taken before summary rewrites

Sections are appended in order, each preceded by a ``---`` line:

    ## Task <id>: <title> <marker>
    ### What We Did / Files Created/Modified / Technical Details / What We Learned

An optional ``## Progress Summary`` section closes the document.
"""
