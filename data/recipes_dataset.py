RECIPES_DATA = [
    # Plats
    {"title": "Roast chicken with herbs", "category": "plats", "ingredients": ["1 whole chicken", "thyme", "rosemary", "garlic", "olive oil", "salt", "pepper"], "instructions": "Preheat the oven to 200C. Rub the chicken with the herbs, garlic and oil. Roast for 1h30 until golden."},
    {"title": "Mushroom risotto", "category": "plats", "ingredients": ["300g arborio rice", "200g mushrooms", "vegetable stock", "parmesan", "onion", "white wine"], "instructions": "Sweat the onion, add the rice. Pour the stock in little by little while stirring. Finish with the mushrooms and parmesan."},
    {"title": "Grilled salmon and vegetables", "category": "plats", "ingredients": ["4 salmon fillets", "courgettes", "peppers", "lemon", "olive oil", "herbes de Provence"], "instructions": "Grill the salmon 4 min per side. Serve with the grilled vegetables and a squeeze of lemon."},
    {"title": "Vegetable curry with coconut milk", "category": "plats", "ingredients": ["potatoes", "carrots", "chickpeas", "coconut milk", "curry paste", "coriander"], "instructions": "Brown the vegetables, add the curry paste and coconut milk. Simmer for 25 min."},
    # Desserts
    {"title": "Gluten-free chocolate mousse", "category": "dessert", "ingredients": ["200g dark chocolate", "6 eggs", "50g sugar", "pinch of salt"], "instructions": "Melt the chocolate. Separate the eggs and whisk the whites. Fold everything together gently."},
    {"title": "Panna cotta with red berries", "category": "dessert", "ingredients": ["400ml cream", "60g sugar", "gelatine", "vanilla", "red berries"], "instructions": "Heat the cream with sugar and vanilla. Add the gelatine. Pour into moulds and chill for 4h."},
    {"title": "Gluten-free chocolate fondant", "category": "dessert", "ingredients": ["200g chocolate", "100g butter", "150g sugar", "3 eggs", "50g rice flour"], "instructions": "Melt chocolate and butter. Add sugar, eggs and flour. Bake 12 min at 180C."},
]
