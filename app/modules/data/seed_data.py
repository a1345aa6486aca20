"""Demo customers and vehicles loaded by POST /data/load-mock"""

MOCK_CUSTOMERS = [
    {
        "name": "Navakar Enterprises Private Limited",
        "trade_name": "Navakar Enterprises",
        "address": "No-2/465, Brindavan Thotam Kasinaickanpatty,\nTirupattur - 635901",
        "state": "Tamil Nadu",
        "gstin": "33ITWPS2062F1Z7",
        "contact_person": "Mr. Jain",
        "contact_phone": "9876543210",
        "contact_email": "jain@navakar.com",
    },
    {
        "name": "Shubhkarat India Limited",
        "trade_name": "Shubhkarat India",
        "address": "Bhiwandi",
        "state": "Maharashtra",
        "gstin": "27AAAAA0000A1Z5",
        "contact_person": "Mr. Patel",
        "contact_phone": "9123456789",
    },
    {
        "name": "Reliance Industries Limited",
        "trade_name": "Reliance Industries",
        "address": "Maker Chambers IV, Nariman Point, Mumbai",
        "state": "Maharashtra",
        "gstin": "27AABCR1234D1Z2",
        "contact_email": "procurement@reliance.com",
    },
]

MOCK_VEHICLES = [
    {"number": "TN 20 AX 1234"},
    {"number": "TN 19 BY 5678"},
    {"number": "MH 04 CZ 9012"},
]
