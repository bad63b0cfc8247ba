# =========================================================
# STATIC CITY CATALOG
# ---------------------------------------------------------
# Reference data loaded once at import. Baseline AQI and
# dominant pollutant seed the synthetic analytics when the
# remote backend has nothing for a city.
# =========================================================

from config.constants import DEFAULT_COHORT_SIZE

_CATALOG_ROWS = [
    # id, name, state, country, region, lat, lng, aqi, dominant, population
    ("delhi", "Delhi", "Delhi", "India", "North India", 28.6139, 77.2090, 212, "PM2.5", 32941000),
    ("mumbai", "Mumbai", "Maharashtra", "India", "West India", 19.0760, 72.8777, 138, "PM10", 21297000),
    ("kolkata", "Kolkata", "West Bengal", "India", "East India", 22.5726, 88.3639, 164, "PM2.5", 15134000),
    ("bengaluru", "Bengaluru", "Karnataka", "India", "South India", 12.9716, 77.5946, 92, "PM10", 13608000),
    ("chennai", "Chennai", "Tamil Nadu", "India", "South India", 13.0827, 80.2707, 84, "PM10", 11776000),
    ("hyderabad", "Hyderabad", "Telangana", "India", "South India", 17.3850, 78.4867, 118, "PM2.5", 10801000),
    ("pune", "Pune", "Maharashtra", "India", "West India", 18.5204, 73.8567, 104, "PM10", 7166000),
    ("ahmedabad", "Ahmedabad", "Gujarat", "India", "West India", 23.0225, 72.5714, 146, "PM2.5", 8650000),
    ("jaipur", "Jaipur", "Rajasthan", "India", "North India", 26.9124, 75.7873, 152, "PM10", 4107000),
    ("lucknow", "Lucknow", "Uttar Pradesh", "India", "North India", 26.8467, 80.9462, 188, "PM2.5", 3945000),
    ("kanpur", "Kanpur", "Uttar Pradesh", "India", "North India", 26.4499, 80.3319, 196, "PM2.5", 3124000),
    ("patna", "Patna", "Bihar", "India", "East India", 25.5941, 85.1376, 204, "PM2.5", 2490000),
    ("chandigarh", "Chandigarh", "Chandigarh", "India", "North India", 30.7333, 76.7794, 126, "PM2.5", 1231000),
    ("bhopal", "Bhopal", "Madhya Pradesh", "India", "Central India", 23.2599, 77.4126, 112, "PM10", 2371000),
    ("indore", "Indore", "Madhya Pradesh", "India", "Central India", 22.7196, 75.8577, 98, "PM10", 3276000),
    ("nagpur", "Nagpur", "Maharashtra", "India", "Central India", 21.1458, 79.0882, 108, "PM10", 2970000),
    ("surat", "Surat", "Gujarat", "India", "West India", 21.1702, 72.8311, 121, "PM10", 7784000),
    ("visakhapatnam", "Visakhapatnam", "Andhra Pradesh", "India", "South India", 17.6868, 83.2185, 88, "PM10", 2358000),
    ("kochi", "Kochi", "Kerala", "India", "South India", 9.9312, 76.2673, 56, "PM2.5", 2347000),
    ("guwahati", "Guwahati", "Assam", "India", "North-East India", 26.1445, 91.7362, 131, "PM2.5", 1212000),
    ("bhubaneswar", "Bhubaneswar", "Odisha", "India", "East India", 20.2961, 85.8245, 102, "PM10", 1174000),
    ("amritsar", "Amritsar", "Punjab", "India", "North India", 31.6340, 74.8723, 171, "PM2.5", 1413000),
    ("varanasi", "Varanasi", "Uttar Pradesh", "India", "North India", 25.3176, 82.9739, 178, "PM2.5", 1804000),
    ("dehradun", "Dehradun", "Uttarakhand", "India", "North India", 30.3165, 78.0322, 96, "PM2.5", 804000),
    ("thiruvananthapuram", "Thiruvananthapuram", "Kerala", "India", "South India", 8.5241, 76.9366, 48, "PM10", 1087000),
    ("raipur", "Raipur", "Chhattisgarh", "India", "Central India", 21.2514, 81.6296, 141, "PM10", 1420000),
]

CITY_CATALOG = [
    {
        "id": city_id,
        "name": name,
        "state": state,
        "country": country,
        "region": region,
        "lat": lat,
        "lng": lng,
        "aqi": aqi,
        "dominant_pollutant": dominant,
        "population": population,
        "pollutants": {},
    }
    for city_id, name, state, country, region, lat, lng, aqi, dominant, population in _CATALOG_ROWS
]

CITY_CATALOG_BY_ID = {city["id"]: city for city in CITY_CATALOG}

DEFAULT_CITY = CITY_CATALOG[0]

DEFAULT_TRACKED_CITY_IDS = ["delhi", "mumbai", "bengaluru", "kolkata"]


def resolve_city(city_id):
    """Catalog lookup; unknown ids resolve to the default city."""
    return CITY_CATALOG_BY_ID.get(city_id, DEFAULT_CITY)


def default_cohort_ids(size: int = DEFAULT_COHORT_SIZE):
    return [city["id"] for city in CITY_CATALOG[:size]]


def search_cities(query: str, limit: int = 50):
    if not query:
        return CITY_CATALOG[:25]

    keywords = [k for k in query.lower().split() if k]

    return [
        city for city in CITY_CATALOG
        if all(
            k in city["name"].lower()
            or k in city["country"].lower()
            or k in city["region"].lower()
            for k in keywords
        )
    ][:limit]
