"""
Transaction migration pipeline.

Four standalone stages move transaction records between a flat file and
PostgreSQL:

    export     data table   -> delimited file
    load       delimited file -> data table
    transform  data table   -> cargo table
    disperse   cargo table  -> charges table (company reference resolved)
"""

__version__ = "1.0.0"
