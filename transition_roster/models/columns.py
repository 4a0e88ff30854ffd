"""Header names used by the source sheets.

Names are spelled exactly as they appear in the district exports, typos
included (``Eligibilty``).
"""

# Roster (TENTATIVE)
STUDENT_ID = "STUDENT ID"
FIRST = "FIRST"
LAST = "LAST"
GRADE = "GRADE"
REGULAR_CAMPUS = "REGULAR CAMPUS"
FIRST_DAY_OF_AEP = "FIRST DAY OF AEP"
DATE_ADDED = "DATE ADDED TO SPREADSHEET"
MERGED_DOC_ID = "Merged Doc ID - Transition Letter"
MERGED_DOC_URL = "Merged Doc URL - Transition Letter"
MERGED_DOC_LINK = "Link to merged Doc - Transition Letter"
MERGE_STATUS = "Document Merge Status - Transition Letter"

# LAST and FIRST of a row that failed to build
ERROR_MARKER = "ERROR"

# Canonical keys added to the base roster row by the merger
CANON_STUDENT_ID = "STUDENT_ID"
CANON_HOME_CAMPUS = "HOME_CAMPUS"
CANON_ENTRY_DATE = "ENTRY_DATE"

# Entry/withdrawal log
ENTRY_DATE = "Entry Date"
EW_FULL_NAME = "Student Name(Last, First)"
EW_FIRST_NAMES = ("Student First Name", "First Name", "FIRST", "First")
EW_LAST_NAMES = ("Student Last Name", "Last Name", "LAST", "Last")
EW_GRADES = ("Grade", "GRADE", "Grd Lvl")
GRADE_LEVEL = "Grd Lvl"

# Registrations
REG_FIRST_NAME = "Student First Name"
REG_LAST_NAME = "Student Last Name"
START_DATE = "Start Date"
PLACEMENT_DAYS = "Placement Days"
HOME_CAMPUS = "Home Campus"
ELIGIBILITY = "Eligibilty"
BEHAVIOR_CONTRACT = "Behavior Contract"
EDUCATIONAL_FACTORS = "Educational Factors"

# Contact info
STUDENT_EMAIL = "Student Email"
PARENT_NAME = "Parent Name"
GUARDIAN_EMAIL = "Guardian 1 Email"

# Schedules
WITHDRAWAL_DATE = "Wdraw Date"
PERIOD_BEGIN = "Per Beg"

# Form responses
EMAIL_ADDRESS = "Email Address"
STUDENT = "Student"
TIMESTAMP_FIELDS = ("Timestamp", "timestamp", "Date", "date", "Submit Time", "Submitted")

# Attendance
DAYS_IN_ATTENDANCE = "Days in Att"
DAYS_IN_ENROLLMENT = "Days in Enrl"
