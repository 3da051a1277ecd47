"""Deep-research prompt templates for discovering and profiling Texas HVAC businesses."""

import json
from typing import Any, Dict, Optional

TEXAS_COUNTIES = {
    "HOUSTON_METRO": ["Harris", "Fort Bend", "Montgomery", "Brazoria", "Galveston"],
    "DFW_METROPLEX": ["Dallas", "Tarrant", "Collin", "Denton", "Rockwall"],
    "SAN_ANTONIO": ["Bexar", "Comal", "Guadalupe"],
    "AUSTIN": ["Travis", "Williamson", "Hays"],
    "OTHER_MAJOR": ["El Paso", "Hidalgo", "Nueces", "Lubbock", "Cameron"],
}


def region_discovery(county: str, city: Optional[str] = None, focus: str = "all") -> str:
    location = f"{city}, {county} County, Texas" if city else f"{county} County, Texas"
    focus_desc = "all types of HVAC services" if focus in ("all", "", None) else f"{focus} HVAC services specifically"

    return f"""# HVAC Business Discovery: {location}

## Objective
Find and document HVAC companies in {location} that could be acquisition targets for a consolidator seeking {focus_desc}.

## Target Business Profile
- **Revenue**: $1M - $10M annually (estimate from indicators)
- **Ownership**: Family-owned, independent operators, or single-owner businesses
- **Age**: Established 10+ years (built reputation and customer base)
- **Online**: Weak or outdated digital presence (opportunity to improve)
- **Operations**: Solid technical reputation despite limited marketing

## Research Sources to Check
1. **Official Records**
   - Texas TDLR (Department of Licensing and Regulation) - ACR/ACB licenses
   - {county} County permit records
   - Texas Secretary of State business filings

2. **Business Directories**
   - Better Business Bureau
   - Local Chamber of Commerce
   - Yellow Pages / Superpages
   - Industry associations (ACCA, PHCC, RSES)

3. **Online Presence**
   - Google Maps / Google Business profiles
   - Yelp business listings
   - Facebook business pages
   - Company websites

4. **Trade Resources**
   - HVACR Business magazine features
   - Local trade show exhibitor lists
   - Manufacturer dealer locators (Carrier, Trane, Lennox, etc.)

## Data to Collect Per Business
| Field | Priority | Notes |
|-------|----------|-------|
| Business Name | Required | Include any DBA names |
| Address | Required | Full street address |
| City | Required | |
| County | Required | Verify it's in {county} |
| Phone | Required | Primary contact |
| Website | Important | Note if missing or outdated |
| Founded Year | Important | |
| Owner Name | Important | Research LinkedIn, BBB |
| Employee Count | Important | Estimate from fleet, jobs |
| Specializations | Important | Residential/Commercial/Industrial |
| TDLR License | Important | License number and status |
| Google Rating | Helpful | Rating and review count |
| Yelp Rating | Helpful | Rating and review count |
| Fleet Size | Helpful | Vehicle count estimate |
| Certifications | Helpful | NATE, EPA 608, manufacturer |

## Output Format
For each business, provide a structured entry:

---
**[Business Name]**
- Location: [City, {county} County]
- Address: [Full address]
- Phone: [Number]
- Website: [URL or "None"]
- Founded: [Year] | Owner: [Name or "Unknown"]
- Employees: [Estimate] | Fleet: [Estimate]
- Specializations: [List]
- TDLR License: [Number if found]
- Google: [Rating] ([Count] reviews) | Yelp: [Rating] ([Count] reviews)
- Acquisition Notes: [Brief assessment of fit]
---

## Priority Criteria
Rank businesses higher if they show:
1. Long operating history with limited web presence
2. Strong permit activity suggesting steady work
3. Family name in business name
4. Specialized niche (refrigeration, restaurants, clean rooms)
5. Active license but minimal online reviews
6. Multiple service vehicles (3-15 range)

Focus on QUALITY over QUANTITY. It's better to find 10 well-documented prospects than 50 with missing data."""


def business_enrichment(
    business_name: str,
    city: str,
    county: str,
    existing_data: Optional[Dict[str, Any]] = None,
) -> str:
    known = json.dumps(existing_data, indent=2, default=str) if existing_data else "Limited initial data available"

    return f"""# Deep Research: {business_name}

## Objective
Gather comprehensive information about {business_name} in {city}, {county} County, Texas for acquisition evaluation.

## Known Information
{known}

## Research Tasks

### 1. Business Fundamentals
- Verify current business status and address
- Find founding year and business history
- Identify current owner(s) and their background
- Determine company structure (LLC, Corp, Partnership)

### 2. Operational Assessment
- Estimate employee count (check LinkedIn, job postings)
- Estimate fleet size (Google Street View, social media)
- Identify service area coverage
- Find specializations and major service types

### 3. Licensing & Compliance
- TDLR license status and history
- EPA 608 certifications
- NATE or other technician certifications
- Manufacturer certifications/dealerships

### 4. Market Position
- Google Business profile and reviews
- Yelp reviews and ratings
- BBB accreditation and complaints
- Angi/HomeAdvisor presence

### 5. Digital Presence Assessment
- Website quality and age (use Wayback Machine)
- Social media activity
- Paid advertising presence
- SEO/search visibility

### 6. Acquisition Indicators
- Owner age if discoverable
- Any succession planning signals
- Recent news or announcements
- Growth or decline indicators

## Output
Provide a comprehensive profile with confidence ratings (High/Medium/Low) for each data point."""


def permit_analysis(business_name: str, county: str, license_number: Optional[str] = None) -> str:
    license_line = f"TDLR License: {license_number}" if license_number else ""

    return f"""# Permit Activity Analysis: {business_name}

## Objective
Research permit records in {county} County to estimate the business activity level and revenue potential for {business_name}.

{license_line}

## Data to Find
1. **Permit Volume**
   - Total permits in last 12 months
   - Total permits in last 3 years
   - Trend direction (growing/stable/declining)

2. **Permit Types**
   - New installation vs replacement
   - Residential vs commercial
   - Permit values if available

3. **Geographic Coverage**
   - Cities/areas where permits pulled
   - Service area estimation

4. **Seasonal Patterns**
   - Peak activity months
   - Off-season activity level

## Revenue Estimation Guidelines
- Residential replacement: $5K-15K average
- Residential new construction: $8K-20K average
- Commercial projects: $20K-200K+ range
- Maintenance contracts not reflected in permits

## Output
Provide:
1. Permit counts and trends
2. Revenue range estimate with methodology
3. Confidence level
4. Comparison to similar businesses if possible"""


def competitive_landscape(county: str, city: Optional[str] = None) -> str:
    location = f"{city}, {county} County" if city else f"{county} County"

    return f"""# HVAC Competitive Landscape: {location}, Texas

## Objective
Map the HVAC competitive landscape in {location} to identify market dynamics and potential acquisition targets.

## Research Areas

### 1. Market Leaders
- Identify the 5-10 largest HVAC companies
- Note any PE-backed consolidators already in market
- Franchise operations (One Hour, Aire Serv, etc.)

### 2. Mid-Market Players
- Companies in $2M-$10M range
- Family-owned operations
- Second/third generation businesses

### 3. Specialists
- Commercial-only contractors
- Industrial/refrigeration specialists
- Niche market players

### 4. Market Dynamics
- Overall market size estimate
- Growth trends
- Consolidation activity
- Pricing environment

### 5. Acquisition Targets
Based on research, identify top 5 potential acquisition targets with rationale.

## Output Format
Provide a market map with:
1. Competitive tiers (large, mid, small)
2. Market share estimates
3. Strategic positioning
4. Specific acquisition recommendations"""


PROMPT_TEMPLATES = {
    "region_discovery": region_discovery,
    "business_enrichment": business_enrichment,
    "permit_analysis": permit_analysis,
    "competitive_landscape": competitive_landscape,
}


def get_prompt(kind: str, **params) -> str:
    """Render a named template. Raises KeyError for unknown kinds."""
    if kind not in PROMPT_TEMPLATES:
        raise KeyError(f"Unknown prompt template: {kind}. Available: {sorted(PROMPT_TEMPLATES)}")
    return PROMPT_TEMPLATES[kind](**params)
