"""Initial dataset written the first time a collection is read."""

import copy

INITIAL_STUDENTS = [
    {
        'id': '1', 'fullName': 'Ahmed Nur', 'parentName': 'Fatima Ali', 'phone': '615-555-0101',
        'grade': 'Grade 5', 'enrollmentDate': '2023-09-01', 'gender': 'Male', 'dob': '2012-05-15',
        'address': 'Mogadishu, Hodan', 'parentAccessCode': 'AHM-101', 'libraryClearance': True,
    },
    {
        'id': '2', 'fullName': 'Khadija Omar', 'parentName': 'Omar Yusuf', 'phone': '615-555-0102',
        'grade': 'Grade 3', 'enrollmentDate': '2023-09-02', 'gender': 'Female', 'dob': '2014-08-20',
        'address': 'Mogadishu, Waberi', 'parentAccessCode': 'KHA-102', 'libraryClearance': True,
    },
    {
        'id': '3', 'fullName': 'Liban Farah', 'parentName': 'Amina Hassan', 'phone': '615-555-0103',
        'grade': 'Grade 8', 'enrollmentDate': '2023-09-01', 'gender': 'Male', 'dob': '2009-03-10',
        'address': 'Mogadishu, Heliwa', 'parentAccessCode': 'LIB-103', 'libraryClearance': False,
    },
    {
        'id': '4', 'fullName': 'Safia Abdi', 'parentName': 'Abdi Mohamed', 'phone': '615-555-0104',
        'grade': 'Grade 1', 'enrollmentDate': '2024-01-15', 'gender': 'Female', 'dob': '2016-11-05',
        'address': 'Mogadishu, Hamar Weyne', 'parentAccessCode': 'SAF-104', 'libraryClearance': True,
    },
    {
        'id': '5', 'fullName': 'Yusuf Ibrahim', 'parentName': 'Hodan Warsame', 'phone': '615-555-0105',
        'grade': 'Grade 5', 'enrollmentDate': '2023-09-01', 'gender': 'Male', 'dob': '2012-01-25',
        'address': 'Mogadishu, Hodan', 'parentAccessCode': 'YUS-105', 'libraryClearance': True,
    },
]

INITIAL_TEACHERS = [
    {'id': 't1', 'fullName': 'Ustad Hassan', 'phone': '615-000-001', 'subjects': ['Math', 'Physics'], 'joinDate': '2020-01-01'},
    {'id': 't2', 'fullName': 'Ustadah Maryam', 'phone': '615-000-002', 'subjects': ['Somali', 'Tarbiyo'], 'joinDate': '2021-05-15'},
]

INITIAL_FEES = [
    {'id': '101', 'studentId': '1', 'amount': 50, 'date': '2024-05-01', 'status': 'Paid', 'description': 'Tuition Fee'},
    {'id': '102', 'studentId': '2', 'amount': 45, 'date': '2024-05-01', 'status': 'Pending', 'description': 'Tuition Fee'},
    {'id': '103', 'studentId': '3', 'amount': 60, 'date': '2024-04-01', 'status': 'Overdue', 'description': 'Transport Fee'},
]

INITIAL_EXPENSES = [
    {'id': 'e1', 'description': 'Teacher Salaries (May)', 'category': 'Salary', 'amount': 1200, 'date': '2024-05-01'},
    {'id': 'e2', 'description': 'School Cleaning Supplies', 'category': 'Supplies', 'amount': 150, 'date': '2024-05-05'},
]

INITIAL_GRADES = [
    {'id': 'g1', 'studentId': '1', 'subject': 'Math', 'score': 85, 'maxScore': 100, 'date': '2024-04-15', 'term': 'Term 1'},
    {'id': 'g2', 'studentId': '1', 'subject': 'Somali', 'score': 92, 'maxScore': 100, 'date': '2024-04-15', 'term': 'Term 1'},
    {'id': 'g3', 'studentId': '5', 'subject': 'Math', 'score': 78, 'maxScore': 100, 'date': '2024-04-15', 'term': 'Term 1'},
]

INITIAL_SETTINGS = {
    'name': 'Cabdullahi ibnu Mubarak',
    'address': 'Mogadishu, Somalia',
    'phone': '+252 61 5000000',
    'theme': 'Ocean',
    'feeTypes': ['Tuition Fee', 'Registration Fee', 'Exam Fee', 'Transport Fee', 'Books/Uniform'],
    'subjects': [
        'Math', 'Physics', 'Biology', 'Chemistry', 'Somali', 'Carabi',
        'English', 'Tarbiyo', 'Taarikh', 'Juqraafi', 'Business', 'Technology',
    ],
    'currency': 'USD',
}

INITIAL_ANNOUNCEMENT = 'Welcome to the new term! Please ensure all student records are updated by Friday.'


def initial_attendance(today):
    return [
        {'id': 'a1', 'studentId': '1', 'date': today, 'status': 'Present'},
        {'id': 'a2', 'studentId': '2', 'date': today, 'status': 'Absent'},
        {'id': 'a3', 'studentId': '3', 'date': today, 'status': 'Late'},
    ]


def initial_activities(now_iso, timestamp):
    return [
        {
            'id': 'act1',
            'action': 'System Initialized',
            'details': 'Welcome to Cabdullahi SMS',
            'date': now_iso,
            'timestamp': timestamp,
            'type': 'info',
        },
    ]


def seed_document(name, *, today, now_iso, timestamp):
    """Return a fresh JSON-ready copy of the seed for collection ``name``."""
    documents = {
        'students': INITIAL_STUDENTS,
        'teachers': INITIAL_TEACHERS,
        'fees': INITIAL_FEES,
        'expenses': INITIAL_EXPENSES,
        'grades': INITIAL_GRADES,
        'settings': INITIAL_SETTINGS,
        'announcement': INITIAL_ANNOUNCEMENT,
    }
    if name == 'attendance':
        return initial_attendance(today)
    if name == 'activities':
        return initial_activities(now_iso, timestamp)
    return copy.deepcopy(documents[name])
