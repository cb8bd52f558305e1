"""
app/domain/ontario_cities.py

Ontario survey areas published in the CMHC rental market survey.

Served to clients when the dataset is temporarily unavailable.
"""

from __future__ import annotations

ONTARIO_CITIES: tuple[str, ...] = (
    "Barrie",
    "Belleville",
    "Bracebridge",
    "Brantford",
    "Brighton",
    "Brock",
    "Brockville",
    "Centre Wellington",
    "Chatham-Kent",
    "Cobourg",
    "Collingwood",
    "Cornwall",
    "Dunnville",
    "Elliot Lake",
    "Erin",
    "Essex",
    "Fergus",
    "Fort Erie",
    "Gravenhurst",
    "Greater Napanee",
    "Greater Sudbury",
    "Guelph",
    "Haldimand County",
    "Halton Hills",
    "Hamilton",
    "Huntsville",
    "Ingersoll",
    "Kapuskasing",
    "Kawartha Lakes",
    "Kenora",
    "Kincardine",
    "Kings Subdivision",
    "Kingston",
    "Kirkland Lake",
    "Kitchener-Cambridge-Waterloo",
    "Lambton Shores",
    "Leamington",
    "Lincoln",
    "London",
    "Meaford",
    "Midland",
    "Milton",
    "Mississippi Mills",
    "Nanticoke",
    "Newcastle",
    "Norfolk",
    "North Bay",
    "North Grenville",
    "North Perth",
    "Orangeville",
    "Orillia",
    "Oshawa",
    "Ottawa-Gatineau",
    "Owen Sound",
    "Pembroke",
    "Petawawa",
    "Peterborough",
    "Port Hope",
    "Prince Edward",
    "Sarnia",
    "Saugeen Shores",
    "Sault Ste. Marie",
    "Scugog",
    "Smiths Falls",
    "South Huron",
    "St. Andrews",
    "St. Catharines-Niagara",
    "St. Thomas",
    "Stratford",
    "Strathroy",
    "Temiskaming Shores",
    "The Nation",
    "Thunder Bay",
    "Tillsonburg",
    "Timmins",
    "Toronto",
    "Trent Hills",
    "Trenton",
    "Wallaceburg",
    "Wasaga Beach",
    "West Grey",
    "West Nipissing",
    "Windsor",
    "Woodstock",
)
