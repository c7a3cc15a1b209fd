"""Sample pay-stub extraction, handy for trying the viewer without real data.

Positions mix fractional x/y with percent left/top and absolute-looking
width/height, the way real extraction output tends to.
"""

import json

SAMPLE_HIGHLIGHT_DATA = {
    "pay_stubs": {
        "employee": {
            "value": "El Fadl Fadil Daissaoui",
            "position": {
                "page_number": 4,
                "x": 0.166,
                "y": 0.53,
                "width": 180,
                "height": 18,
                "left": 16.6,
                "top": 53,
            },
        },
        "employer": {
            "value": "Peace River Center",
            "position": {
                "page_number": 4,
                "x": 0.166,
                "y": 0.43,
                "width": 150,
                "height": 18,
                "left": 16.6,
                "top": 43,
            },
        },
        "payment": {
            "pay_period": {
                "start_date": "2024-10-27",
                "end_date": "2024-11-09",
                "position": {
                    "page_number": 4,
                    "x": 0.66,
                    "y": 0.43,
                    "width": 100,
                    "height": 15,
                    "left": 66,
                    "top": 43,
                },
            },
            "pay_period_cycle": {},
            "gross_pay": {
                "value": 4440,
                "position": {
                    "page_number": 4,
                    "x": 0.5,
                    "y": 0.78,
                    "width": 80,
                    "height": 15,
                    "left": 50,
                    "top": 78,
                },
            },
            "annual_gross_pay": {},
            "pay_date": {
                "value": "2024-11-15",
                "position": {
                    "page_number": 4,
                    "x": 0.66,
                    "y": 0.4,
                    "width": 100,
                    "height": 15,
                    "left": 66,
                    "top": 40,
                },
            },
            "hourly_rate": {},
        },
        "ytd": {
            "ytd_gross_pay": 92376.47,
            "ytd_gross_pay_period": {
                "start_date": "2024-01-01",
                "end_date": "2024-11-15",
            },
            "position": {
                "page_number": 4,
                "x": 0.7,
                "y": 0.78,
                "width": 80,
                "height": 15,
                "left": 70,
                "top": 78,
            },
        },
        "annual_income_estimation": {
            "value": 105343,
            "confidence_level": "medium",
            "reason": (
                "Projected from ytd_gross_pay of $92,376.47 over 320 days "
                "(about $288.68 per day) to a 365-day year."
            ),
        },
    }
}


def sample_highlight_json() -> str:
    return json.dumps(SAMPLE_HIGHLIGHT_DATA, indent=2)
