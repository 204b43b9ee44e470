"""Static SQL keyword dictionary with category metadata.

Keyword recognition is case-insensitive. Every keyword belongs to exactly
one category; words listed in several groups resolve by the precedence
order of ``CATEGORY_PRECEDENCE``. Common column names (``name``,
``value``, ``status``, ``type`` and similar) are deliberately absent so
they lex as identifiers.
"""

from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple


class KeywordCategory(Enum):
    """Category used by the casing and spacing rules."""

    STATEMENT = "statement"
    CLAUSE = "clause"
    FUNCTION = "function"
    DATATYPE = "datatype"
    OPERATOR = "operator"
    CONSTRAINT = "constraint"
    MODIFIER = "modifier"
    MISC = "misc"


STATEMENT_KEYWORDS: FrozenSet[str] = frozenset(
    """
    SELECT INSERT UPDATE DELETE MERGE
    CREATE ALTER DROP TRUNCATE
    IF ELSE WHILE BEGIN END RETURN BREAK CONTINUE GOTO RETURNS
    TRY CATCH THROW
    COMMIT ROLLBACK TRANSACTION TRAN SAVE
    EXEC EXECUTE DECLARE SET
    USE PRINT RAISERROR WAITFOR WITH
    BACKUP RESTORE CHECKPOINT DBCC GRANT REVOKE DENY
    OPEN CLOSE FETCH DEALLOCATE
    EXPLAIN
    """.split()
)

CLAUSE_KEYWORDS: FrozenSet[str] = frozenset(
    """
    FROM WHERE JOIN ON
    INNER LEFT RIGHT OUTER CROSS FULL NATURAL APPLY
    GROUP BY HAVING ORDER
    INTO VALUES OUTPUT
    UNION INTERSECT EXCEPT
    TOP DISTINCT ALL
    AS OVER PARTITION
    CASE WHEN THEN
    PIVOT UNPIVOT
    OFFSET NEXT ROWS ONLY LIMIT RETURNING
    FOR USING MATCHED
    """.split()
)

FUNCTION_KEYWORDS: FrozenSet[str] = frozenset(
    """
    COUNT SUM AVG MIN MAX STRING_AGG GROUPING GROUPING_ID
    STDEV STDEVP VAR VARP COUNT_BIG CHECKSUM_AGG
    PERCENTILE_CONT PERCENTILE_DISC PERCENT_RANK CUME_DIST
    LEN DATALENGTH SUBSTRING LTRIM RTRIM TRIM UPPER LOWER REPLACE STUFF
    CHARINDEX PATINDEX CONCAT CONCAT_WS STRING_SPLIT REVERSE REPLICATE
    FORMAT TRANSLATE QUOTENAME STRING_ESCAPE SOUNDEX DIFFERENCE UNICODE NCHAR
    GETDATE GETUTCDATE SYSDATETIME SYSUTCDATETIME SYSDATETIMEOFFSET
    DATEADD DATEDIFF DATEDIFF_BIG DATENAME DATEPART DATETRUNC
    YEAR MONTH DAY EOMONTH DATEFROMPARTS DATETIMEFROMPARTS ISDATE
    CAST CONVERT TRY_CAST TRY_CONVERT PARSE TRY_PARSE
    ISNULL NULLIF COALESCE IIF CHOOSE GREATEST LEAST
    ABS CEILING FLOOR ROUND POWER SQRT SQUARE SIGN RAND EXP LOG LOG10 PI
    NEWID NEWSEQUENTIALID SCOPE_IDENTITY IDENT_CURRENT OBJECT_ID OBJECT_NAME
    DB_NAME DB_ID SCHEMA_NAME SUSER_SNAME HOST_NAME APP_NAME ERROR_MESSAGE
    ERROR_NUMBER ERROR_LINE ERROR_SEVERITY ERROR_STATE ERROR_PROCEDURE
    ROW_NUMBER RANK DENSE_RANK NTILE LAG LEAD FIRST_VALUE LAST_VALUE
    ISNUMERIC JSON_VALUE JSON_QUERY JSON_MODIFY ISJSON OPENJSON
    OPENDATASOURCE OPENQUERY OPENROWSET OPENXML
    CONTAINSTABLE FREETEXTTABLE
    """.split()
)

DATATYPE_KEYWORDS: FrozenSet[str] = frozenset(
    """
    INT INTEGER BIGINT SMALLINT TINYINT
    DECIMAL NUMERIC FLOAT REAL DOUBLE PRECISION DEC
    MONEY SMALLMONEY BIT
    CHAR VARCHAR NVARCHAR TEXT NTEXT CHARACTER VARYING
    BINARY VARBINARY IMAGE
    DATE TIME DATETIME DATETIME2 SMALLDATETIME DATETIMEOFFSET TIMESTAMP
    UNIQUEIDENTIFIER XML SQL_VARIANT ROWVERSION
    GEOGRAPHY GEOMETRY HIERARCHYID CURSOR BOOLEAN
    """.split()
)

OPERATOR_KEYWORDS: FrozenSet[str] = frozenset(
    """
    AND OR NOT IN EXISTS BETWEEN LIKE IS NULL
    ANY SOME CONTAINS FREETEXT ESCAPE
    """.split()
)

CONSTRAINT_KEYWORDS: FrozenSet[str] = frozenset(
    """
    PRIMARY KEY FOREIGN REFERENCES UNIQUE CHECK DEFAULT CONSTRAINT
    INDEX CLUSTERED NONCLUSTERED IDENTITY IDENTITY_INSERT ROWGUIDCOL
    CASCADE NOCHECK ADD COLUMN
    TABLE SCHEMA DATABASE VIEW PROCEDURE PROC FUNCTION TRIGGER SEQUENCE
    FILLFACTOR INCLUDE COLLATE
    """.split()
)

MODIFIER_KEYWORDS: FrozenSet[str] = frozenset(
    """
    ASC DESC
    NOLOCK HOLDLOCK UPDLOCK READPAST ROWLOCK PAGLOCK TABLOCK TABLOCKX XLOCK
    READUNCOMMITTED SERIALIZABLE SNAPSHOT FORCESEEK NOEXPAND NOWAIT
    OPTION MAXDOP RECOMPILE MAXRECURSION OPTIMIZE
    UNBOUNDED PRECEDING FOLLOWING CURRENT RANGE
    PERCENT TABLESAMPLE RECURSIVE LATERAL
    INSTEAD AFTER OF
    """.split()
)

MISC_KEYWORDS: FrozenSet[str] = frozenset(
    """
    CURRENT_TIMESTAMP CURRENT_USER SESSION_USER SYSTEM_USER USER
    AUTHORIZATION PUBLIC
    OFF TO WITHIN NOCOUNT XACT_ABORT ANSI_NULLS QUOTED_IDENTIFIER
    ISOLATION READ COMMITTED UNCOMMITTED REPEATABLE
    INSERTED DELETED
    """.split()
)

# Highest precedence first
CATEGORY_PRECEDENCE: Tuple[Tuple[KeywordCategory, FrozenSet[str]], ...] = (
    (KeywordCategory.STATEMENT, STATEMENT_KEYWORDS),
    (KeywordCategory.CLAUSE, CLAUSE_KEYWORDS),
    (KeywordCategory.OPERATOR, OPERATOR_KEYWORDS),
    (KeywordCategory.FUNCTION, FUNCTION_KEYWORDS),
    (KeywordCategory.DATATYPE, DATATYPE_KEYWORDS),
    (KeywordCategory.CONSTRAINT, CONSTRAINT_KEYWORDS),
    (KeywordCategory.MODIFIER, MODIFIER_KEYWORDS),
    (KeywordCategory.MISC, MISC_KEYWORDS),
)


def _build_keyword_map() -> Mapping[str, KeywordCategory]:
    mapping = {}
    for category, words in reversed(CATEGORY_PRECEDENCE):
        for word in words:
            mapping[word] = category
    return MappingProxyType(mapping)


KEYWORDS: Mapping[str, KeywordCategory] = _build_keyword_map()


def keyword_category(word: str) -> Optional[KeywordCategory]:
    """Look up the category of a word, ignoring case.

    Args:
        word: Candidate keyword text

    Returns:
        The keyword category, or None if the word is not a keyword
    """
    return KEYWORDS.get(word.upper())


def is_keyword(word: str) -> bool:
    return word.upper() in KEYWORDS
