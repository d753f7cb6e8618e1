from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, Integer, Date, String, Numeric, DateTime, func

Base = declarative_base()

class Draw(Base):
    """Model for storing Toto draw information."""
    __tablename__ = 'lottery_draws'
    
    id = Column(Integer, primary_key=True, index=True)
    draw_number = Column(Integer, nullable=False, unique=True, index=True)
    draw_date = Column(Date, nullable=True, index=True)
    winning_number_1 = Column(Integer, nullable=False)
    winning_number_2 = Column(Integer, nullable=False)
    winning_number_3 = Column(Integer, nullable=False)
    winning_number_4 = Column(Integer, nullable=False)
    winning_number_5 = Column(Integer, nullable=False)
    winning_number_6 = Column(Integer, nullable=False)
    additional_number = Column(Integer, nullable=True)
    
    # Canonical "n,n,n,n,n,n" key, kept in sync on insert for fast lookups
    combination_key = Column(String(32), nullable=False, index=True)
    
    # Statistical fields from the CSV export
    from_last = Column(String(32), nullable=True)
    low_numbers = Column(Integer, nullable=True)
    high_numbers = Column(Integer, nullable=True)
    odd_numbers = Column(Integer, nullable=True)
    even_numbers = Column(Integer, nullable=True)
    range_1_10 = Column(Integer, nullable=True)
    range_11_20 = Column(Integer, nullable=True)
    range_21_30 = Column(Integer, nullable=True)
    range_31_40 = Column(Integer, nullable=True)
    range_41_50 = Column(Integer, nullable=True)
    
    # Prize information
    division_1_winners = Column(Integer, nullable=True)
    division_1_prize = Column(Numeric(15, 2), nullable=True)
    division_2_winners = Column(Integer, nullable=True)
    division_2_prize = Column(Numeric(15, 2), nullable=True)
    division_3_winners = Column(Integer, nullable=True)
    division_3_prize = Column(Numeric(15, 2), nullable=True)
    division_4_winners = Column(Integer, nullable=True)
    division_4_prize = Column(Numeric(15, 2), nullable=True)
    division_5_winners = Column(Integer, nullable=True)
    division_5_prize = Column(Numeric(15, 2), nullable=True)
    division_6_winners = Column(Integer, nullable=True)
    division_6_prize = Column(Numeric(15, 2), nullable=True)
    division_7_winners = Column(Integer, nullable=True)
    division_7_prize = Column(Numeric(15, 2), nullable=True)
    
    created_at = Column(DateTime, server_default=func.now())
    
    @property
    def winning_numbers(self):
        return [
            self.winning_number_1,
            self.winning_number_2,
            self.winning_number_3,
            self.winning_number_4,
            self.winning_number_5,
            self.winning_number_6,
        ]
    
    def __repr__(self):
        return f"<Draw(draw_number={self.draw_number}, date={self.draw_date})>"
