'''
Static sector benchmark table.

UK SIC-based sectors with base multiples, bucket adjustment tables and KPI
benchmarks. Adding a sector only requires adding a record here (or to a JSON
file passed to SectorCatalog.from_json); no code change is needed.
'''

SECTOR_RECORDS = [
    {
        'key': 'technology',
        'code': '62',
        'name': 'Computer Programming & Consultancy',
        'category': 'Technology',
        'baseMultiple': {'revenue': 2.5, 'ebitda': 12.0},
        'adjustmentFactors': {
            'size': {'small': 0.8, 'medium': 1.0, 'large': 1.3},
            'growth': {'low': 0.7, 'moderate': 1.0, 'high': 1.5},
            'profitability': {'low': 0.8, 'average': 1.0, 'high': 1.3},
        },
        'benchmarks': {
            'avgProfitMargin': 15.0,
            'avgGrowthRate': 20.0,
            'avgCustomerRetention': 85.0,
        },
    },
    {
        'key': 'saas',
        'code': '62.01',
        'name': 'Software as a Service',
        'category': 'Technology',
        'baseMultiple': {'revenue': 4.0, 'ebitda': 15.0},
        'adjustmentFactors': {
            'size': {'small': 0.9, 'medium': 1.0, 'large': 1.4},
            'growth': {'low': 0.6, 'moderate': 1.0, 'high': 1.8},
            'profitability': {'low': 0.7, 'average': 1.0, 'high': 1.4},
        },
        'benchmarks': {
            'avgProfitMargin': 20.0,
            'avgGrowthRate': 30.0,
            'avgCustomerRetention': 90.0,
        },
    },
    {
        'key': 'ecommerce',
        'code': '47.91',
        'name': 'Retail via Internet',
        'category': 'Retail',
        'baseMultiple': {'revenue': 1.2, 'ebitda': 8.0},
        'adjustmentFactors': {
            'size': {'small': 0.7, 'medium': 1.0, 'large': 1.2},
            'growth': {'low': 0.8, 'moderate': 1.0, 'high': 1.4},
            'profitability': {'low': 0.8, 'average': 1.0, 'high': 1.2},
        },
        'benchmarks': {
            'avgProfitMargin': 8.0,
            'avgGrowthRate': 15.0,
            'avgCustomerRetention': 70.0,
        },
    },
    {
        'key': 'manufacturing',
        'code': '10-33',
        'name': 'Manufacturing',
        'category': 'Industrial',
        'baseMultiple': {'revenue': 0.8, 'ebitda': 6.0},
        'adjustmentFactors': {
            'size': {'small': 0.7, 'medium': 1.0, 'large': 1.2},
            'growth': {'low': 0.9, 'moderate': 1.0, 'high': 1.2},
            'profitability': {'low': 0.8, 'average': 1.0, 'high': 1.2},
        },
        'benchmarks': {
            'avgProfitMargin': 10.0,
            'avgGrowthRate': 5.0,
            'avgCustomerRetention': 80.0,
        },
    },
    {
        'key': 'professional_services',
        'code': '69-75',
        'name': 'Professional Services',
        'category': 'Services',
        'baseMultiple': {'revenue': 1.0, 'ebitda': 7.0},
        'adjustmentFactors': {
            'size': {'small': 0.8, 'medium': 1.0, 'large': 1.2},
            'growth': {'low': 0.9, 'moderate': 1.0, 'high': 1.3},
            'profitability': {'low': 0.8, 'average': 1.0, 'high': 1.3},
        },
        'benchmarks': {
            'avgProfitMargin': 12.0,
            'avgGrowthRate': 10.0,
            'avgCustomerRetention': 85.0,
        },
    },
    {
        'key': 'healthcare',
        'code': '86',
        'name': 'Healthcare',
        'category': 'Healthcare',
        'baseMultiple': {'revenue': 1.5, 'ebitda': 9.0},
        'adjustmentFactors': {
            'size': {'small': 0.8, 'medium': 1.0, 'large': 1.3},
            'growth': {'low': 0.9, 'moderate': 1.0, 'high': 1.3},
            'profitability': {'low': 0.9, 'average': 1.0, 'high': 1.2},
        },
        'benchmarks': {
            'avgProfitMargin': 14.0,
            'avgGrowthRate': 8.0,
            'avgCustomerRetention': 90.0,
        },
    },
    {
        'key': 'hospitality',
        'code': '55-56',
        'name': 'Hospitality & Food Service',
        'category': 'Hospitality',
        'baseMultiple': {'revenue': 0.5, 'ebitda': 4.0},
        'adjustmentFactors': {
            'size': {'small': 0.7, 'medium': 1.0, 'large': 1.2},
            'growth': {'low': 0.8, 'moderate': 1.0, 'high': 1.3},
            'profitability': {'low': 0.7, 'average': 1.0, 'high': 1.3},
        },
        'benchmarks': {
            'avgProfitMargin': 6.0,
            'avgGrowthRate': 5.0,
            'avgCustomerRetention': 60.0,
        },
    },
    {
        'key': 'construction',
        'code': '41-43',
        'name': 'Construction',
        'category': 'Construction',
        'baseMultiple': {'revenue': 0.6, 'ebitda': 5.0},
        'adjustmentFactors': {
            'size': {'small': 0.7, 'medium': 1.0, 'large': 1.2},
            'growth': {'low': 0.9, 'moderate': 1.0, 'high': 1.2},
            'profitability': {'low': 0.8, 'average': 1.0, 'high': 1.2},
        },
        'benchmarks': {
            'avgProfitMargin': 8.0,
            'avgGrowthRate': 6.0,
            'avgCustomerRetention': 75.0,
        },
    },
]
