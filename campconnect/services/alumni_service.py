"""
Alumni Service - static alumni directory.

There is no `alumni` collection yet; records come from the seed list below
and are read-only. Filter options are derived from whatever was loaded.
"""

from typing import List, Dict, Optional

from campconnect.schemas.schemas import AlumniListResponse, AlumniResponse, ContactLinks

ALL = "all"

ALUMNI_SEED: List[Dict] = [
    {
        "id": "1",
        "name": "Parul Chaddha",
        "batch": "2025",
        "branch": "Computer Science",
        "company": "Flipkart",
        "position": "Software Engineer",
        "email": "parul947a@gmail.com",
        "phone": "+91 9876543210",
        "location": "Bangalore",
        "experience": "3 years",
        "linkedin": "linkedin.com/in/parulchaddha0904",
    },
    {
        "id": "2",
        "name": "Priya Patel",
        "batch": "2019",
        "branch": "Computer Science",
        "company": "Microsoft",
        "position": "Senior Software Engineer",
        "email": "priya.patel@outlook.com",
        "phone": "+91 9876543211",
        "location": "Hyderabad",
        "experience": "4 years",
        "linkedin": "linkedin.com/in/priyapatel",
    },
    {
        "id": "3",
        "name": "Amit Kumar",
        "batch": "2021",
        "branch": "Electronics Engineering",
        "company": "Amazon",
        "position": "Software Development Engineer",
        "email": "amit.kumar@amazon.com",
        "phone": "+91 9876543212",
        "location": "Chennai",
        "experience": "2 years",
    },
    {
        "id": "4",
        "name": "Sneha Gupta",
        "batch": "2018",
        "branch": "Computer Science",
        "company": "Apple",
        "position": "Senior Software Engineer",
        "email": "sneha.gupta@apple.com",
        "location": "Pune",
        "experience": "5 years",
        "linkedin": "linkedin.com/in/snehagupta",
    },
    {
        "id": "5",
        "name": "Vikash Singh",
        "batch": "2020",
        "branch": "Electrical Engineering",
        "company": "Tesla",
        "position": "Software Engineer",
        "email": "vikash.singh@tesla.com",
        "phone": "+91 9876543213",
        "location": "Bangalore",
        "experience": "3 years",
    },
]


def contact_links(person: Dict) -> ContactLinks:
    """mailto/tel URIs and the external profile link, where present."""
    phone = person.get("phone")
    linkedin = person.get("linkedin")
    return ContactLinks(
        email=f"mailto:{person['email']}",
        phone=f"tel:{phone}" if phone else None,
        linkedin=f"https://{linkedin}" if linkedin else None,
    )


def filter_alumni(alumni: List[Dict], company: str = ALL, branch: str = ALL) -> List[Dict]:
    """Company matches case-insensitively as a substring; branch matches exactly."""
    filtered = alumni
    if company != ALL:
        needle = company.lower()
        filtered = [p for p in filtered if needle in p["company"].lower()]
    if branch != ALL:
        filtered = [p for p in filtered if p["branch"] == branch]
    return filtered


def company_options(alumni: List[Dict]) -> List[str]:
    return sorted({p["company"] for p in alumni})


def branch_options(alumni: List[Dict]) -> List[str]:
    return sorted({p["branch"] for p in alumni})


class AlumniService:

    def __init__(self, records: Optional[List[Dict]] = None):
        self.records = records if records is not None else ALUMNI_SEED

    def load(self) -> List[Dict]:
        return [dict(record) for record in self.records]

    def browse(self, company: str = ALL, branch: str = ALL) -> AlumniListResponse:
        loaded = self.load()
        filtered = filter_alumni(loaded, company, branch)
        return AlumniListResponse(
            alumni=[AlumniResponse(**p, links=contact_links(p)) for p in filtered],
            total=len(filtered),
            companies=company_options(loaded),
            branches=branch_options(loaded),
        )
